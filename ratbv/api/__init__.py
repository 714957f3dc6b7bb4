"""HTTP routers calling into the scraping core."""
