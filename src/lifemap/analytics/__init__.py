"""Pure analytics over events: co-occurrence, temporal links, graph, trajectory, trends."""
