"""Infrastructure helpers: a TTL cache and persisted JSON state."""