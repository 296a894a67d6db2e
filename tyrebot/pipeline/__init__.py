"""
Knowledge-grounded dialogue pipeline.

Contents
--------
- matcher.QueryMatcher: best-effort ranking of knowledge entries (max 5)
- context_builder.build_context: deterministic grounding text
- prompts.build_system_prompt: support persona + guidelines + context
- generation.ChatModelGenerationService: LangChain chat model adapter with deadline and retries
- orchestrator.DialogueOrchestrator: per-turn state machine and feedback updates
- errors: InputError / ServiceError taxonomy
"""
