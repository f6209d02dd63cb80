"""resource_scout.parser: discovery of resource URLs in markup and CSS."""
