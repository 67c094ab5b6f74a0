"""Domain and application building blocks shared by the marketplace apps."""
