"""Resumable Selenium scraper for paginated catalog listings."""
