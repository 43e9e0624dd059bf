"""Query/import generators, agent partitioning and benchmark runners."""
