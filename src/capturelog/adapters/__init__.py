"""Adapters connecting the core to storage engines and event sources."""
