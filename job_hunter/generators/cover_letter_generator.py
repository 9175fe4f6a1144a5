"""
Cover Letter Generator - Creates cover letters for job applications.

Letters are written by Claude when an Anthropic key is configured. Any
failure of the AI service falls back to a fixed template so an apply
step never fails because of the letter.
"""

from typing import Optional
import logging

import anthropic

from job_hunter.core.models import Listing, Profile


class CoverLetterGenerator:
    """Generates cover letters for job applications."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 1000

    def __init__(
        self,
        ai_api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        use_ai: bool = True,
        client=None,
    ):
        """
        Initialize the cover letter generator.

        Args:
            ai_api_key: Anthropic API key; without one only templates are used
            model: Claude model name
            use_ai: Whether to use AI generation at all
            client: Preconfigured Anthropic client (overrides ai_api_key)
        """
        self.model = model
        self.use_ai = use_ai
        self.logger = logging.getLogger(self.__class__.__name__)

        if client is None and ai_api_key:
            client = anthropic.Anthropic(api_key=ai_api_key)
        self.client = client

    @property
    def ai_enabled(self) -> bool:
        return self.use_ai and self.client is not None

    def generate(self, profile: Profile, listing: Listing) -> str:
        """Generate a cover letter for a listing."""
        if not self.ai_enabled:
            return self.template_letter(profile, listing)

        try:
            letter = self._generate_with_ai(profile, listing)
        except anthropic.APIError as e:
            self.logger.error(f"AI generation failed: {e}, using template")
            return self.template_letter(profile, listing)

        if not letter.strip():
            self.logger.warning("AI returned an empty letter, using template")
            return self.template_letter(profile, listing)

        self.logger.info(f"Generated cover letter for {listing.title} at {listing.company}")
        return letter

    def _generate_with_ai(self, profile: Profile, listing: Listing) -> str:
        recent = profile.positions[0] if profile.positions else None
        experience = f"{recent.title} at {recent.company}" if recent else "Not specified"

        prompt = f"""Generate a professional cover letter for this job application.

Resume Summary:
Name: {profile.name}
Skills: {', '.join(profile.skills)}
Experience: {experience}

Job Details:
Title: {listing.title}
Company: {listing.company}
Description: {listing.description[:3000]}

Write a compelling cover letter that highlights relevant experience and skills. Keep it concise (3-4 paragraphs)."""

        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        )

        return "".join(
            getattr(block, "text", "")
            for block in response.content
            if getattr(block, "type", None) == "text"
        )

    def template_letter(self, profile: Profile, listing: Listing) -> str:
        """Fixed letter used when AI generation is off or unavailable."""
        skills = ", ".join(profile.skills[:5])
        skills_line = f" My background in {skills} aligns well with this role." if skills else ""
        closing_name = profile.name or "Applicant"

        return (
            f"Dear Hiring Manager,\n\n"
            f"I am writing to express my interest in the {listing.title} position at "
            f"{listing.company}.{skills_line}\n\n"
            f"I would welcome the opportunity to discuss how I can contribute to your team.\n\n"
            f"Best regards,\n{closing_name}"
        )
