import google.generativeai as genai
from openai import OpenAI
from yugen.config import Config
from datetime import datetime, timedelta
import logging
import json
import re

# Configure logger
logger = logging.getLogger(__name__)

# Initialize Gemini (if key present)
if Config.GEMINI_API_KEY:
    genai.configure(api_key=Config.GEMINI_API_KEY)

COACH_SYSTEM_PROMPT = """You are an expert running coach who writes safe, progressive training plans.
Be encouraging but honest, and keep workouts appropriate for the athlete's experience level."""

JSON_SYSTEM_PROMPT = "You are a precise assistant. Respond with valid JSON only, no prose and no markdown."


class LLMError(Exception):
    """The LLM provider could not be reached or returned nothing usable."""


def _openai_messages(messages, system_instruction):
    openai_messages = []
    if system_instruction:
        openai_messages.append({"role": "system", "content": system_instruction})
    for msg in messages:
        if msg["role"] == "system" and system_instruction:
            continue
        openai_messages.append(msg)
    return openai_messages


def generate_chat_response(messages, model_name=None, mode="normal", system_prompt=None, provider=None,
                           context=None, timeout=None, today=None):
    """
    Generate a chat response from the configured LLM provider.

    Args:
        messages (list): List of message dictionaries with 'role' and 'content'.
        model_name (str): Model override; defaults come from Config per provider.
        mode (str): Prompting mode ('normal', 'coach', 'json').
        system_prompt (str): Custom system prompt to override the mode's default.
        provider (str): Optional provider override ('local', 'openai', 'gemini').
        context (str): Optional user context appended to the system prompt.
        timeout (float): Seconds before the request is abandoned.
        today (date): Date injected into the prompt, defaults to now.

    Returns:
        str: The generated response text.

    Raises:
        LLMError: Missing credentials, timeout, transport or provider failure.
    """
    if not provider:
        provider = Config.LLM_PROVIDER
    if timeout is None:
        timeout = Config.LLM_TIMEOUT_SECONDS

    logger.info(f"Using LLM provider: {provider}")

    # Prepare system instruction
    system_instruction = system_prompt
    if not system_instruction:
        if mode == "coach":
            system_instruction = COACH_SYSTEM_PROMPT
        elif mode == "json":
            system_instruction = JSON_SYSTEM_PROMPT
        else:
            system_instruction = "You are a helpful assistant."

    # Inject context into system prompt if provided
    if context and context.strip():
        system_instruction = f"{system_instruction}\n\n{context}"
        logger.debug(f"Context injected into system prompt ({len(context)} chars)")

    # Always inject current date so the model knows what "today" and "tomorrow" mean
    now = today or datetime.now().date()
    date_str = now.strftime("%Y-%m-%d")
    tomorrow = (now + timedelta(days=1)).strftime("%Y-%m-%d")
    date_injection = f"[CURRENT DATE: {date_str}, {now.strftime('%A')}]\nWhen referencing dates, 'today' = {date_str}, 'tomorrow' = {tomorrow}.\n\n"
    system_instruction = date_injection + system_instruction

    # --- LOCAL LLM (Llama.cpp via OpenAI API) ---
    if provider == "local":
        try:
            client = OpenAI(
                base_url=Config.LOCAL_LLM_URL,
                api_key="sk-no-key-required",
                timeout=timeout,
                max_retries=0,
            )
            logger.info(f"Sending request to Local LLM at {Config.LOCAL_LLM_URL}...")
            completion = client.chat.completions.create(
                model=model_name or Config.LOCAL_LLM_MODEL,
                messages=_openai_messages(messages, system_instruction),
            )
            content = completion.choices[0].message.content
        except Exception as e:
            logger.error(f"Local LLM Error: {e}")
            raise LLMError(f"Error communicating with Local Coach: {e}") from e

    # --- OPENAI ---
    elif provider == "openai":
        if not Config.OPENAI_API_KEY:
            raise LLMError("OpenAI API Key missing.")

        try:
            client = OpenAI(api_key=Config.OPENAI_API_KEY, timeout=timeout, max_retries=0)
            model_to_use = model_name or Config.OPENAI_MODEL
            logger.info(f"Sending request to OpenAI ({model_to_use})...")
            completion = client.chat.completions.create(
                model=model_to_use,
                messages=_openai_messages(messages, system_instruction),
            )
            content = completion.choices[0].message.content
        except Exception as e:
            logger.error(f"OpenAI API Error: {e}")
            raise LLMError(f"Error communicating with OpenAI Coach: {e}") from e

    # --- GEMINI ---
    elif provider == "gemini":
        if not Config.GEMINI_API_KEY:
            raise LLMError("Gemini API Key missing.")

        gemini_history = []
        for msg in messages:
            if msg["role"] == "system":
                continue
            gemini_role = "user" if msg["role"] == "user" else "model"
            gemini_history.append({"role": gemini_role, "parts": [msg["content"]]})

        if not gemini_history:
            raise LLMError("No messages provided.")

        try:
            model = genai.GenerativeModel(
                model_name=model_name or Config.GEMINI_MODEL,
                system_instruction=system_instruction
            )
            last_message = gemini_history[-1]
            if last_message["role"] != "user":
                logger.warning("Last message in history is not from user.")

            chat = model.start_chat(history=gemini_history[:-1])
            response = chat.send_message(last_message["parts"][0], request_options={"timeout": timeout})
            content = response.text
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise LLMError(f"Error communicating with Gemini Coach: {e}") from e

    else:
        raise LLMError(f"Unknown LLM Provider: {provider}")

    if not content or not content.strip():
        raise LLMError(f"Empty response from {provider}")
    return content


def extract_json(text: str):
    """
    Pull the JSON payload out of an LLM reply.

    Handles ```json fences and leading/trailing prose. Raises ValueError when
    nothing parseable is found.
    """
    if not text:
        raise ValueError("empty response")

    fenced = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
    if fenced:
        text = fenced.group(1)

    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try whichever bracket opens first so an object's inner list isn't picked over the object.
    pairs = sorted((("[", "]"), ("{", "}")), key=lambda p: text.find(p[0]) if p[0] in text else len(text))
    for open_char, close_char in pairs:
        start = text.find(open_char)
        end = text.rfind(close_char) + 1
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end])
            except json.JSONDecodeError:
                continue
    raise ValueError("no JSON found in response")
