"""SiteCraft: AI command orchestration for a chat-driven website builder."""
