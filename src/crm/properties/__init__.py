"""Property catalogue -- listings, search and sharing with clients."""
