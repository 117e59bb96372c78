"""
Fixed user-facing texts of the assistant.
"""

from ..common.llm_client import CompletionFailure

NO_DATA_TEXT = "⚠️ Помилка: неможливо відповісти без завантаження даних. Спробуйте ще раз."
FALLBACK_TEXT = "Я не зміг знайти відповідь."
TOO_MANY_STEPS_TEXT = "Забагато кроків. Спробуйте уточнити запит."

COMPLETION_FAILURE_TEXTS = {
    CompletionFailure.QUOTA_EXHAUSTED: (
        "❌ <b>КРИТИЧНА ПОМИЛКА:</b> Закінчились кошти на OpenAI API!\n\n"
        "Потрібно поповнити баланс на https://platform.openai.com/account/billing"
    ),
    CompletionFailure.RATE_LIMITED: "⚠️ Забагато запитів до OpenAI. Почекайте хвилину і спробуйте знову.",
    CompletionFailure.INVALID_CREDENTIALS: "❌ Помилка авторизації OpenAI API. Перевірте OPENAI_API_KEY.",
    CompletionFailure.MODEL_NOT_FOUND: "❌ Модель OpenAI не знайдена. Перевірте налаштування OPENAI_MODEL.",
}
