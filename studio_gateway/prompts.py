"""Prompt templates sent to the AI gateway."""
from __future__ import annotations

from typing import Dict

CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant specializing in creative content, image generation, "
    "and digital art. You can help users with questions about their projects, provide "
    "creative suggestions, and assist with any questions they have about using this "
    "AI-powered platform."
)

ENHANCE_TYPES = ("generate", "edit", "prompt-to-prompt")

ENHANCE_SYSTEM_PROMPTS: Dict[str, str] = {
    "generate": (
        "You are an expert prompt engineer for AI image generation. Transform simple user "
        "prompts into highly detailed, vivid, and professional prompts. Include artistic "
        "style, lighting, composition, mood, colors and textures. Keep the enhanced prompt "
        "concise (2-3 sentences max) and do not include negative prompts."
    ),
    "edit": (
        "You are an expert prompt engineer for AI image editing. Transform simple editing "
        "instructions into precise prompts describing exactly the desired changes, with "
        "attention to style consistency, blending, lighting and color. Keep it focused "
        "(2-3 sentences max) and preserve the original image's coherence."
    ),
    "prompt-to-prompt": (
        "You are an expert at analyzing images and creating detailed prompts. Based on the "
        "user's rough idea, write a comprehensive prompt covering the key visual elements, "
        "style, medium, lighting, colors, mood and composition (3-4 sentences max). If the "
        "input is in Farsi, translate it to English first. Always respond in English."
    ),
}

FARSI_NOTE = (
    "\n\nNOTE: The user input may be in Farsi (Persian). Please translate it to English "
    "first, then create the enhanced prompt in English."
)

STYLE_SUFFIXES: Dict[str, str] = {
    "photorealistic": "photorealistic, ultra detailed, 8k resolution, professional photography",
    "anime": "anime style, vibrant colors, detailed line art, studio quality",
    "fantasy": "fantasy art, magical atmosphere, epic scene, concept art quality",
    "vintage": "vintage style, retro aesthetic, film grain, classic composition",
    "cinematic": "cinematic lighting, dramatic atmosphere, movie quality, epic scene",
    "abstract": "abstract art, creative interpretation, artistic style, unique perspective",
    "watercolor": "watercolor painting, soft colors, artistic brushstrokes, traditional art",
    "oil-painting": "oil painting style, rich textures, classical art, museum quality",
}

IMAGE_STYLES = ("none",) + tuple(STYLE_SUFFIXES)

IMAGE_ANALYSIS_PROMPT = (
    "Analyze this image in extreme detail. Describe the subject, composition, lighting, "
    "colors, mood, style, textures, and artistic elements. Create a comprehensive, vivid "
    "description suitable for AI image generation."
)

TEXT_EXPANSION_TEMPLATE = (
    "You are a prompt engineering expert. Transform this idea into a hyper-detailed, vivid "
    "description for AI image generation. Elaborate on the scene, environment, lighting, "
    "colors, textures, and atmosphere. {style} {mood}\n\nIdea: \"{idea}\""
)

MODEL_PROMPTS_TEMPLATE = """Based on the following detailed description, generate optimized prompts for different AI models. Return ONLY valid JSON.

Description: "{description}"
{negative}

Generate prompts for these models:
- general: Universal detailed prompt (max 1000 chars)
- kling_ai: Cinematic focus with camera movements (max 1000 chars)
- ideogram: Natural language with style keywords (max 450 chars)
- leonardo_ai: Object with "prompt" and "negative_prompt" fields (max 1000 chars each)
- midjourney: Descriptive with parameters like --ar 16:9 (max 1500 chars)
- flux: Clear, highly descriptive (max 1000 chars)

JSON format:
{{
  "general": "...",
  "kling_ai": "...",
  "ideogram": "...",
  "leonardo_ai": {{"prompt": "...", "negative_prompt": "..."}},
  "midjourney": "...",
  "flux": "..."
}}"""

DEFAULT_REMIX_PROMPT = (
    "Creatively blend and fuse these images together into a single stunning, cohesive "
    "artwork. Maintain the best elements of each image while creating smooth transitions "
    "and a unified composition. The result should be visually striking and artistically "
    "impressive."
)

SINGLE_REMIX_SUFFIX = "Ultra high resolution, stunning details, professional quality."

MULTI_REMIX_SUFFIX = (
    "Create an artistic fusion combining elements from {count} different images. Ultra high "
    "resolution, stunning composition, professional artistic quality, seamless blending."
)
