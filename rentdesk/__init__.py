"""Asset lifecycle service for the vehicle-rental admin dashboard."""
