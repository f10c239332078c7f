"""KBCrawl: breadth-first crawler that feeds a RAG knowledge base."""
