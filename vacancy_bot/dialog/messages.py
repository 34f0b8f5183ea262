"""Fixed user-facing replies. None of them embed user input."""

PROMPT_MIN_SALARY = "💰 Введите минимальную зарплату (например, 150000):"
PROMPT_MAX_SALARY = "💰 Введите максимальную зарплату (например, 300000):"
PROMPT_CITY = "📍 Введите город (например, Москва):"
PROMPT_KEYWORD = "🔑 Введите ключевое слово для поиска в названии вакансии:"

INVALID_SALARY = "❌ Зарплата должна быть целым неотрицательным числом. Фильтр не изменен."
INVALID_KEYWORD = "❌ Ключевое слово не может быть пустым. Фильтр не изменен."
INVALID_EXPERIENCE = "❌ Укажите опыт числом лет, например: /experience 3"
REMOVE_KEYWORD_USAGE = "Укажите слово для удаления, например: /remove_keyword python"

SALARY_MIN_UPDATED = "✅ Минимальная зарплата обновлена"
SALARY_MAX_UPDATED = "✅ Максимальная зарплата обновлена"
CITY_UPDATED = "✅ Город обновлен"
CITY_CLEARED = "✅ Фильтр по городу сброшен"
KEYWORD_ADDED = "✅ Ключевое слово добавлено"
KEYWORD_REMOVED = "✅ Ключевое слово удалено"
KEYWORDS_CLEARED = "🗑 Ключевые слова удалены"
EXPERIENCE_UPDATED = "✅ Требуемый опыт обновлен"
REMOTE_ON = "🏠 Только удаленная работа: включено"
REMOTE_OFF = "🏠 Только удаленная работа: выключено"
AGENCIES_ON = "🚫 Кадровые агентства скрыты"
AGENCIES_OFF = "🤝 Кадровые агентства показываются"
FILTERS_RESET = "♻️ Фильтры сброшены к значениям по умолчанию"
CANCELLED = "Ввод отменен."
NOTHING_TO_CANCEL = "Нечего отменять."
UNKNOWN_COMMAND = "Не понимаю команду. Список команд: /help"

SOURCES_USAGE = (
    "Укажите источники через пробел, например: /sources hh habr\n"
    "Доступные источники: hh, habr, linkedin, getmatch"
)
SOURCE_USAGE = "Укажите один источник, например: /source habr"
INVALID_CURRENCY = "❌ Укажите код валюты из трех букв, например: /currency USD"
SOURCES_UPDATED = "✅ Источники обновлены"
CURRENCY_UPDATED = "✅ Валюта зарплаты обновлена"
