"""Eight Spots: movie catalog, purchases and watch tracking."""
