"""
SiteCraft Core: AI command orchestration.

1. CAPABILITIES (capabilities/)
   - Static catalog of user-invokable actions with gating requirements
   - Advisory trigger matcher and system prompt builder

2. MEMORY (memory/)
   - User / project / session tiers behind explicit repositories
   - Context builder that renders memory into the prompt

3. PIPELINE (pipeline/)
   - Onboarding state machine with default-generation and inference fallbacks

4. PROVIDERS (providers/)
   - Anthropic and OpenAI adapters behind one normalized interface
   - Router with retry and cross-vendor fallback

5. ACTIONS (actions/)
   - Typed tool-call payloads and the all-or-nothing site mutation executor
"""
