"""Adapters wiring the core to concrete storage and output formats."""
