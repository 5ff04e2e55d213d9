"""Statement ingestion: column detection, row parsing and format adapters."""
