"""FreightDesk command line."""
