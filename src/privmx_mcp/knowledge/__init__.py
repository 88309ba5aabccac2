"""PrivMX API knowledge: store, document adapters, search and vector layers."""
