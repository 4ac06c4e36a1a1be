from catalog.scraper.run import main

if __name__ == "__main__":
    # Configuration comes from the environment (see catalog/scraper/config.py);
    # the flags only override it for a single run.
    raise SystemExit(main())
