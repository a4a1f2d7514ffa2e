"""API routes for thermalpos."""
