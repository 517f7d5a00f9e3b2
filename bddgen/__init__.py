"""bddgen -- Gherkin feature files to Mocha test skeletons."""

__version__ = "0.1.0"
