# Core layer: models, strategies, validator, engine and the default scanner.
# Importing this package pulls no web dependencies.
