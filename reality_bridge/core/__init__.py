"""Domain logic: chains, bridges, contracts, questions and transaction pipelines."""
