"""Graph to Markov chain conversion and the stationary distribution solver."""
