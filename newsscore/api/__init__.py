"""HTTP surface and persistence for the NEWS score engine."""
