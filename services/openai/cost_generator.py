class CostGenerator:
	"""Estimate API cost for the commentary and speech models.

	Completion models are priced per 1,000 tokens and speech models per
	1,000 input characters.

	Supported models and their default prices (USD):
	- gpt-4o: 0.0025 (input), 0.01 (output) per 1k tokens
	- gpt-4o-mini: 0.00015 (input), 0.0006 (output) per 1k tokens
	- gpt-4.1: 0.002 (input), 0.008 (output) per 1k tokens
	- tts-1: 0.015 per 1k characters
	- tts-1-hd: 0.03 per 1k characters

	The values above are defaults and should be kept up-to-date by
	the caller if pricing changes.
	"""

	DEFAULT_PRICING = {
		"gpt-4o": {"input_per_1k": 0.0025, "output_per_1k": 0.01},
		"gpt-4o-mini": {"input_per_1k": 0.00015, "output_per_1k": 0.0006},
		"gpt-4.1": {"input_per_1k": 0.002, "output_per_1k": 0.008},
	}

	DEFAULT_SPEECH_PRICING = {
		"tts-1": 0.015,
		"tts-1-hd": 0.03,
	}

	def __init__(self, pricing: dict | None = None, speech_pricing: dict | None = None):
		"""Create a CostGenerator.

		Args:
			pricing: Optional mapping of model -> {"input_per_1k": float, "output_per_1k": float}.
			speech_pricing: Optional mapping of speech model -> price per 1k characters.
		"""
		self.pricing = pricing or dict(self.DEFAULT_PRICING)
		self.speech_pricing = speech_pricing or dict(self.DEFAULT_SPEECH_PRICING)

	def estimate(self, input_tokens: int, output_tokens: int, model: str) -> dict:
		"""Estimate cost for a single completion call.

		Raises:
			ValueError: If tokens are negative or model is not supported.
		"""
		if input_tokens < 0 or output_tokens < 0:
			raise ValueError("Token counts must be non-negative integers.")

		model = model.lower()
		if model not in self.pricing:
			raise ValueError(f"Unsupported model '{model}'. Supported: {', '.join(self.pricing.keys())}")

		rates = self.pricing[model]
		input_cost = (input_tokens / 1000.0) * rates["input_per_1k"]
		output_cost = (output_tokens / 1000.0) * rates["output_per_1k"]
		total = input_cost + output_cost

		return {
			"model": model,
			"input_tokens": int(input_tokens),
			"output_tokens": int(output_tokens),
			"input_cost": round(input_cost, 8),
			"output_cost": round(output_cost, 8),
			"total_cost": round(total, 8),
		}

	def estimate_speech(self, characters: int, model: str) -> dict:
		"""Estimate cost for synthesizing `characters` characters of text."""
		if characters < 0:
			raise ValueError("Character count must be non-negative.")

		model = model.lower()
		if model not in self.speech_pricing:
			raise ValueError(f"Unsupported speech model '{model}'. Supported: {', '.join(self.speech_pricing.keys())}")

		total = (characters / 1000.0) * self.speech_pricing[model]
		return {"model": model, "characters": int(characters), "total_cost": round(total, 8)}

	def zero(self, model: str, input_tokens: int = 0, output_tokens: int = 0) -> dict:
		"""Return a zeroed-out estimate for models without pricing."""
		return {
			"model": model,
			"input_tokens": int(input_tokens),
			"output_tokens": int(output_tokens),
			"input_cost": 0.0,
			"output_cost": 0.0,
			"total_cost": 0.0,
		}
