"""Image fetcher application: Gemini URL discovery plus grayscale conversion."""
