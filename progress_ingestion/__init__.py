"""Local reading of upload files (CSV, XLSX) ahead of sending them to the backend."""
