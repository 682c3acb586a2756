"""Client requirements -- search criteria, typed preferences and gathered candidates."""
