"""HTTP API for the timecard generation engine."""
