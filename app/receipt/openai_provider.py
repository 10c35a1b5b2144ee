import base64

from agents import Agent, Runner

INSTRUCTIONS = """\
You are a receipt transcriber. Given a receipt image, return the text printed on it.

Rules:
- Transcribe every line top to bottom, one receipt line per output line
- Keep numbers, currency symbols, currency codes and dates exactly as printed
- Do NOT translate, summarize, or correct anything
- Do NOT add commentary, markdown or code fences
- If the image is not a receipt or is unreadable, return an empty response"""

agent = Agent(
    name="Receipt Transcriber",
    instructions=INSTRUCTIONS,
    model="gpt-4o-mini",
    output_type=str,
)


class OpenAIReceiptTextExtractor:
    """Receipt OCR using OpenAI Agents SDK with GPT-4o-mini vision."""

    async def extract_text(self, image_bytes: bytes, content_type: str) -> str:
        b64_image = base64.b64encode(image_bytes).decode("utf-8")
        media_type = content_type or "image/jpeg"

        result = await Runner.run(
            agent,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": "Transcribe the text of this receipt."},
                        {"type": "input_image", "image_url": f"data:{media_type};base64,{b64_image}"},
                    ],
                }
            ],
        )

        return result.final_output or ""
