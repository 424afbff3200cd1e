"""Training loop, costs, gradient checking and run pipelines."""
