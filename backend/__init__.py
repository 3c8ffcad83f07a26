"""HTTP host for the Ordered Map Kernel."""
