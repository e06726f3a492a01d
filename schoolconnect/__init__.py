"""SchoolConnect classroom messaging service."""
