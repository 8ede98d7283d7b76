"""HTTP trigger surface for AskQ."""
