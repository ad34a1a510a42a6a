"""Request resolution core: parsing, negotiation, upstream access and redirects."""
