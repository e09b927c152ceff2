"""OVN northbound client and VM NIC helpers for a virtual machine cluster."""

__version__ = "0.1.0"