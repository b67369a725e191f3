"""readmesync -- GitHub README to Hugo content sync service."""
