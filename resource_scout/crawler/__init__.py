"""resource_scout.crawler: fetch client, relay catalogue and batch scheduler."""
