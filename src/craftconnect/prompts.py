"""Prompt templates for each generative use case."""

from __future__ import annotations

from .schemas.business import SOLUTION_IDS
from .schemas.messaging import MessageContext
from .schemas.quotation import QuotationRequest
from .schemas.vision import VisionSummary

MAX_TRANSCRIPT_CHARS = 1000
MAX_MESSAGE_CONTEXT_CHARS = 500


def business_analysis_prompt(transcript: str) -> str:
    description = transcript.replace('"', "'")[:MAX_TRANSCRIPT_CHARS]
    ids = ", ".join(f'"{i}"' for i in SOLUTION_IDS)
    return f"""Analyze this craft business description and return ONLY a valid JSON object.

Business Description: "{description}"

Return this exact JSON structure:
{{
  "businessType": "[Pottery/Textiles/Jewelry/Woodwork/etc.]",
  "detectedFocus": "[main products/services mentioned]",
  "topProblems": ["problem1", "problem2"],
  "recommendedSolutions": {{
    "primary": {{"id": "website", "reason": "why this is best first step"}},
    "secondary": {{"id": "whatsapp", "reason": "why this is good second option"}}
  }},
  "confidence": 90
}}

IMPORTANT:
- Only return the JSON object, no other text
- Use only these solution IDs: {ids}
- Confidence should be 80-95
- Keep reasons brief but compelling"""


def whatsapp_message_prompt(ctx: MessageContext) -> str:
    product = ""
    if ctx.product_name:
        product += f"Featured Product: {ctx.product_name}\n"
    if ctx.price:
        product += f"Price: Rs. {ctx.price}\n"
    if ctx.description:
        product += f"Description: {ctx.description}\n"
    context = ctx.transcript or "Traditional handmade crafts"
    context = context[:MAX_MESSAGE_CONTEXT_CHARS]
    pricing = "Mentions the price naturally" if ctx.price else "Invites pricing inquiry"
    return f"""Create a professional WhatsApp Business message based on this craft business:

Business Type: {ctx.business_type or "Craft Business"}
Products/Focus: {ctx.detected_focus or "Handmade products"}
{product}Original Description: "{context}"

Create a message that:
1. Starts with friendly greeting and emoji
2. Introduces the business and specialty
3. Uses 2-3 bullet points for key features
4. {pricing}
5. Includes relevant emojis for visual appeal
6. Ends with clear call-to-action
7. Keeps total length under 200 words

Return only the message text, no quotes or formatting."""


def enhancement_prompt(vision: VisionSummary) -> str:
    labels = ", ".join(label.description for label in vision.labels) or "craft product"
    colors = ", ".join(color.rgb for color in vision.colors) or "natural tones"
    return f"""You are a product photography specialist. Analyze this handmade craft product image and provide specific enhancement recommendations.

Image analysis context:
- Labels detected: {labels}
- Dominant colors: {colors}
- Quality score: {vision.quality}/100

Provide a JSON response with:
{{
  "productType": "pottery/textile/jewelry/woodwork/metalwork/etc",
  "currentQuality": {{
    "lighting": "poor/fair/good/excellent",
    "background": "cluttered/plain/professional",
    "composition": "poor/fair/good/excellent",
    "focus": "blurry/soft/sharp/crisp"
  }},
  "enhancementActions": ["specific action 1", "specific action 2"],
  "technicalImprovements": {{
    "backgroundRemoval": true,
    "lightingAdjustment": "none/subtle/moderate/significant",
    "colorCorrection": true,
    "sharpening": false
  }},
  "marketplaceOptimization": {{
    "suggestedAngles": ["front view", "detail shot", "usage context"],
    "additionalPhotos": "recommend 2-4 additional photos for complete listing"
  }},
  "qualityScore": 85,
  "readyForMarketplace": true
}}

Return only the JSON object."""


def pricing_prompt(request: QuotationRequest) -> str:
    r = request
    return f"""You are an expert craft business pricing consultant. Generate a fair, competitive quotation for this handmade product.

Product Details:
- Name: {r.product_name}
- Type: {r.product_type or r.business_type or "craft product"}
- Materials: {r.materials or "traditional materials"}
- Making time: {r.time_to_make or "standard crafting time"}
- Complexity: {r.complexity or "moderate"}
- Region: {r.region or "India"}
- Custom options: {r.customization or "standard"}
- Description: {r.description or "handmade with traditional techniques"}

Business Context:
- Business focus: {r.detected_focus or "handmade crafts"}
- Craft category: {r.business_type or "traditional crafts"}

Return a JSON object with this exact structure:
{{
  "basePrice": 850,
  "priceRange": {{"min": 700, "max": 1200}},
  "breakdown": {{"materials": 200, "labor": 400, "artisanSkill": 150, "profit": 100}},
  "customizationPricing": {{
    "colorVariation": 50,
    "sizeIncrease": 100,
    "personalEngraving": 150,
    "rushDelivery": 200
  }},
  "marketComparison": {{
    "localMarket": "15-20% below average local prices",
    "onlineMarket": "competitive with handmade category",
    "premiumJustification": "authentic traditional techniques + quality materials"
  }},
  "bulkDiscounts": {{"quantity5": 10, "quantity10": 18, "quantity25": 25}},
  "confidence": 87,
  "notes": "Pricing based on Indian handcraft market analysis and material costs"
}}

Ensure:
- Prices in Indian Rupees, whole numbers
- Realistic for Indian handcraft market
- Accounts for material costs, labor, skill premium
- Confidence score 80-95

Return only the JSON object."""
