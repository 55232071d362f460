"""Live shopping backend: live video requests backed by Dyte meetings."""
