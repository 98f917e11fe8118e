"""HTTP API for the signing service."""
