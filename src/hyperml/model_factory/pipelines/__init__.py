"""Pipeline stages and assembly."""
