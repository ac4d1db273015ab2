from dataclasses import dataclass, field
from typing import List


@dataclass
class Character:
    name: str
    system_prompt: str
    bio: List[str] = field(default_factory=list)
    style: List[str] = field(default_factory=list)

    def get_system_prompt(self) -> str:
        """Generate the persona system prompt used to seed every completion"""
        sections = [self.system_prompt.strip()]

        if self.bio:
            sections.append("About you:\n" + "\n".join(f"- {line}" for line in self.bio))

        if self.style:
            sections.append("Style:\n" + "\n".join(f"- {line}" for line in self.style))

        return "\n\n".join(s for s in sections if s)
