# src/generation/prompts.py — v1
"""Prompt text for the two generation stages.

CODE_REGION_OPENER / CODE_REGION_CLOSER are shared with the Stage 2 parser:
SPEC_ADDENDUM tells the model to emit them, and CodeFromSpecStage extracts
whatever sits between them.
"""

from __future__ import annotations

CODE_REGION_OPENER = "<<<CODE>>>"
CODE_REGION_CLOSER = "<<<END>>>"

SPEC_FIELD = "spec"

SPEC_FROM_VIDEO_PROMPT = """You are a pedagogist and product designer with deep \
expertise in crafting engaging learning experiences via interactive web apps.

Examine the contents of the attached video. Then, write a detailed and \
carefully considered spec for an interactive web app designed to complement \
the video and reinforce its key idea or ideas. The recipient of the spec does \
not have access to the video, so the spec must be thorough and self-contained \
(the spec must not mention that it is based on a video).

The goal of the app that is to be built based on the spec is to enhance \
understanding through simple and playful design. The provided spec should not \
be overly complex, i.e., a junior web developer should be able to implement it \
in a single html file (with all styles and scripts inline). Most importantly, \
the spec must clearly outline the core mechanics of the app, and those \
mechanics must be highly effective in reinforcing the given video's key idea(s).

Provide the result as a JSON object containing a single field called "spec", \
whose value is the spec for the web app."""

SPEC_ADDENDUM = f"""

The app must be fully responsive and function properly on both desktop and \
mobile. Provide the code as a single, self-contained HTML document. All \
styles and scripts must be inline. In the result, encase the code between \
"{CODE_REGION_OPENER}" and "{CODE_REGION_CLOSER}" for easy parsing."""
