"""filerecord engine — errors, configuration, structured logging, registry."""
