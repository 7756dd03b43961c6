"""
HuggingFace transformers token provider.

Proposes one token at a time from a causal language model. Each call runs a
single forward pass over the prompt plus the text accepted so far, shapes
the next-token logits with the sampler's temperature/top-k/top-p settings,
and samples one token id.

Features:
    - Auto device selection (MPS, CUDA, CPU)
    - Half precision on GPU, float32 on CPU
    - Logit shaping via transformers' LogitsProcessorList warpers
    - Token metadata: token_id and position

Usage:
    ```python
    from prefix_guard import PrefixConstrainedSampler, SamplerConfig
    from prefix_guard.providers.transformers_provider import TransformersProvider

    provider = TransformersProvider("gpt2", device="cpu", prompt="# Python\\n")
    sampler = PrefixConstrainedSampler(
        provider, SamplerConfig.create(temperature=0.8, top_k=50)
    )
    tokens = sampler.sample_sequence("def fib", max_tokens=20)
    ```
"""

import logging
from typing import Any, Dict, Optional, Sequence

from prefix_guard.providers.base import TokenProvider
from prefix_guard.types import SamplerConfig, Token

logger = logging.getLogger(__name__)


class TransformersProvider(TokenProvider):
    """
    Token provider backed by a HuggingFace causal LM.

    Attributes:
        model_id: HuggingFace model identifier
        device: Device the model runs on (mps, cuda, cpu)
        prompt: Text placed before the generated tokens as conditioning
        model: Loaded AutoModelForCausalLM instance
        tokenizer: Loaded AutoTokenizer instance
        torch_dtype: Model data type
    """

    def __init__(
        self,
        model_id: str,
        device: Optional[str] = None,
        prompt: str = "",
        torch_dtype: Optional[Any] = None,
        seed: Optional[int] = None,
        **kwargs
    ):
        """
        Initialize the provider and load the model.

        Args:
            model_id: HuggingFace model identifier (e.g., "gpt2")
            device: "mps", "cuda", "cpu", or None for auto-detect
            prompt: Conditioning text prepended to the accepted tokens
            torch_dtype: PyTorch dtype (None: float16 on GPU, float32 on CPU)
            seed: Optional seed for the sampling generator
            **kwargs: Extra arguments for from_pretrained
        """
        try:
            import torch
            import transformers  # noqa: F401
        except ImportError as e:
            raise ImportError(
                "transformers and torch are required. "
                "Install with: pip install 'prefix-guard[transformers]'"
            ) from e

        self.model_id = model_id
        self.prompt = prompt
        self.model = None
        self.tokenizer = None
        self.temperature = 1.0
        self.top_p: Optional[float] = None
        self.top_k: Optional[int] = None

        self.device = device = self._resolve_device(device)

        if torch_dtype is None:
            # float16 on GPU for efficiency, float32 on CPU for compatibility
            self.torch_dtype = torch.float16 if device in ["mps", "cuda"] else torch.float32
        else:
            self.torch_dtype = torch_dtype

        self.generator = torch.Generator(device="cpu")
        if seed is not None:
            self.generator.manual_seed(seed)

        logger.info(
            f"Initializing TransformersProvider: model={model_id}, "
            f"device={device}, dtype={self.torch_dtype}"
        )

        self._load_model(**kwargs)
        self._load_tokenizer()

    @staticmethod
    def _resolve_device(requested: Optional[str]) -> str:
        """
        Pick the device the model runs on.

        None auto-selects MPS, then CUDA, then CPU. A requested GPU that is
        not available falls back to CPU with a warning.

        Raises:
            ValueError: If the device name is not "mps", "cuda" or "cpu"
        """
        if requested not in (None, "mps", "cuda", "cpu"):
            raise ValueError(f"Unknown device: {requested}. Use 'mps', 'cuda', or 'cpu'")

        if requested == "cpu":
            return "cpu"

        import torch

        mps = hasattr(torch.backends, "mps") and torch.backends.mps.is_available()
        cuda = torch.cuda.is_available()

        if requested is None:
            device = "mps" if mps else "cuda" if cuda else "cpu"
            logger.info(f"Auto-selected device: {device}")
            return device

        if (requested == "mps" and not mps) or (requested == "cuda" and not cuda):
            logger.warning(f"Device {requested} unavailable, falling back to CPU")
            return "cpu"

        return requested

    def _load_model(self, **kwargs):
        """Load the HuggingFace model onto the target device."""
        from transformers import AutoModelForCausalLM
        import torch

        logger.info(f"Loading model: {self.model_id}")

        load_kwargs = {
            'torch_dtype': self.torch_dtype,
            'low_cpu_mem_usage': True,
        }
        load_kwargs.update(kwargs)

        try:
            self.model = AutoModelForCausalLM.from_pretrained(self.model_id, **load_kwargs)
            self.model = self.model.to(torch.device(self.device))
            self.model.eval()
            logger.info(f"Model loaded successfully on {self.device}")
        except Exception as e:
            logger.error(f"Failed to load model: {e}")
            raise

    def _load_tokenizer(self):
        """Load the HuggingFace tokenizer."""
        from transformers import AutoTokenizer

        logger.info(f"Loading tokenizer: {self.model_id}")

        try:
            self.tokenizer = AutoTokenizer.from_pretrained(self.model_id)
            logger.info("Tokenizer loaded successfully")
        except Exception as e:
            logger.error(f"Failed to load tokenizer: {e}")
            raise

    def configure(self, config: SamplerConfig) -> None:
        self.temperature = config.temperature
        self.top_p = config.top_p
        self.top_k = config.top_k

    def _build_logits_processor(self) -> Any:
        from transformers import (
            LogitsProcessorList,
            TemperatureLogitsWarper,
            TopKLogitsWarper,
            TopPLogitsWarper,
        )

        processors = LogitsProcessorList()
        if self.temperature is not None and self.temperature != 1.0:
            processors.append(TemperatureLogitsWarper(self.temperature))
        if self.top_k is not None and self.top_k > 0:
            processors.append(TopKLogitsWarper(top_k=self.top_k))
        if self.top_p is not None and self.top_p < 1.0:
            processors.append(TopPLogitsWarper(top_p=self.top_p))
        return processors

    def _encode_context(self, context: Sequence[Token]) -> Any:
        """
        Build input ids for the prompt plus accepted tokens.

        Tokens sampled by this provider carry their id in metadata and are
        reused directly; anything else is re-encoded from its text.
        """
        import torch

        ids = []
        if self.prompt:
            ids.extend(self.tokenizer.encode(self.prompt, add_special_tokens=True))
        elif self.tokenizer.bos_token_id is not None:
            ids.append(self.tokenizer.bos_token_id)

        for token in context:
            token_id = token.get("token_id")
            if token_id is not None:
                ids.append(int(token_id))
            else:
                ids.extend(self.tokenizer.encode(token.value, add_special_tokens=False))

        if not ids:
            raise ValueError("Cannot sample from an empty context without a prompt or BOS token")

        return torch.tensor([ids], dtype=torch.long, device=self.device)

    def sample_next_token(self, context: Sequence[Token]) -> Token:
        import torch

        input_ids = self._encode_context(context)

        with torch.no_grad():
            logits = self.model(input_ids=input_ids).logits[:, -1, :].float()

        logprobs = torch.log_softmax(logits, dim=-1)
        shaped = self._build_logits_processor()(input_ids, logits.clone())
        probs = torch.softmax(shaped, dim=-1).cpu()

        token_id = int(torch.multinomial(probs[0], num_samples=1, generator=self.generator).item())
        value = self.tokenizer.decode([token_id], skip_special_tokens=False)

        return Token(
            value,
            float(logprobs[0, token_id].item()),
            (("token_id", str(token_id)), ("position", str(len(context)))),
        )

    def get_provider_info(self) -> Dict[str, Any]:
        info = {
            'provider': 'transformers',
            'model_id': self.model_id,
            'device': self.device,
            'dtype': str(self.torch_dtype),
        }

        if self.tokenizer:
            info['vocab_size'] = len(self.tokenizer)

        if self.model is not None and hasattr(self.model, 'config'):
            config = self.model.config
            if hasattr(config, 'max_position_embeddings'):
                info['context_length'] = config.max_position_embeddings

        return info
