"""Prompt text sent to the upstream vision/language model."""

from typing import Optional

from app.schemas.moderation import CriticalViolation, ModerationRequest


def create_system_prompt() -> str:
    return f"""You are an ULTRA-STRICT content moderator with ZERO TOLERANCE for policy violations. Your job is to identify and BLOCK any content that violates our community guidelines.

CRITICAL VIOLATIONS (IMMEDIATE BLOCK - NO EXCEPTIONS):

1. PERSONAL INFORMATION ({CriticalViolation.personal_information.value}):
   - ANY visible faces of real people
   - Government IDs, licenses, passports, documents
   - Street addresses, house numbers, location signs
   - Phone numbers, email addresses visible in image
   - Credit cards, bank statements, financial documents
   - Handwritten personal information
   - Screenshots containing personal data

2. VIOLENCE & HARASSMENT ({CriticalViolation.violence_harassment.value}):
   - Weapons (guns, knives, clubs, martial arts weapons)
   - Fighting, physical altercations, aggressive gestures
   - Blood, injuries, violence aftermath
   - Hate symbols, extremist imagery
   - Gang signs, criminal activity indicators

3. ADULT CONTENT & NUDITY ({CriticalViolation.adult_content_nudity.value}):
   - Exposed breasts, genitals, buttocks
   - Sexual poses, suggestive positioning
   - Lingerie, underwear, revealing clothing
   - Adult toys, sexual paraphernalia

4. HARMFUL & DANGEROUS CONTENT ({CriticalViolation.harmful_dangerous_content.value}):
   - Illegal drugs, drug paraphernalia
   - Self-harm activities, cutting, suicide content
   - Dangerous stunts, life-threatening activities
   - Explosive devices, bomb-making materials
   - Child endangerment scenarios

RESPONSE FORMAT (JSON ONLY, no other text):
{{
  "status": "failed" | "passed",
  "confidence": 0-100,
  "violation_category": "{CriticalViolation.personal_information.value}" | "{CriticalViolation.violence_harassment.value}" | "{CriticalViolation.adult_content_nudity.value}" | "{CriticalViolation.harmful_dangerous_content.value}" | null,
  "issues": [
    {{
      "category": "exact violation category",
      "description": "specific description of what was detected",
      "severity": "high" | "medium" | "low",
      "confidence": 0-100,
      "blocking_reason": "detailed explanation for blocking"
    }}
  ]
}}

STRICT GUIDELINES:
- Set status to "failed" for ANY violation with confidence >50%
- Set status to "passed" ONLY if absolutely NO violations are detected, with an empty issues array
- Always err on the side of caution: FALSE POSITIVES are better than missed violations
- Analyze both the image content AND the caption text
- Provide detailed blocking reasons for transparency"""


def describe_content(request: ModerationRequest) -> str:
    lines = [f"Filename: {request.filename}", f"Type: {request.declared_type}"]
    if request.caption:
        lines.append(f"Caption: {request.caption}")
    if request.file_count and request.file_count > 1:
        lines.append(f"Files in this upload: {request.file_count}")
    return "\n".join(lines)


def create_user_prompt(request: ModerationRequest) -> str:
    prompt = (
        "ULTRA-STRICT ANALYSIS REQUIRED - Analyze this content for ANY policy violations:\n"
        f"{describe_content(request)}\n\n"
    )
    if not request.image_data:
        prompt += (
            "No image is attached. Judge the filename, type and caption text only.\n\n"
        )
    return prompt + "Report ANY detected violations immediately. Zero tolerance policy in effect."


# --- Engagement analysis ---
COMMENT_ANALYSIS_PROMPT = """You are an AI content analyst. Analyze the following comment and provide:
1. Sentiment analysis (positive, negative, neutral with confidence score)
2. Content moderation flags (inappropriate, spam, harassment)
3. Key topics or themes mentioned
4. Engagement prediction (high, medium, low)
5. Brief summary of the comment's intent

Respond in JSON format with clear, actionable insights."""

STORY_ANALYSIS_PROMPT = """You are an AI content analyst for social media stories. Analyze the story content and provide:
1. Content type classification (lifestyle, professional, entertainment, etc.)
2. Engagement prediction based on visual elements
3. Optimal posting time recommendations
4. Audience targeting suggestions
5. Content quality assessment

Respond in JSON format with practical recommendations."""

ANALYSIS_PROMPTS = {
    "comment": COMMENT_ANALYSIS_PROMPT,
    "story": STORY_ANALYSIS_PROMPT,
}


def create_analysis_user_prompt(content: str, context: Optional[str] = None) -> str:
    prompt = f"Content: {content}"
    if context:
        prompt += f"\nContext: {context}"
    return prompt
