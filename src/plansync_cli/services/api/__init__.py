"""HTTP API clients for the hosted backend."""
