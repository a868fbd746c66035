"""Attack resolution engine. The entry point is ``swl.engine.resolve``."""
