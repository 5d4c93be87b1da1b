# menutrans/config.py

# --- Application Identity (QStandardPaths / tray) ---
SETTINGS_ORG = "MenuTrans"
SETTINGS_APP = "MenuBarTranslator"
SETTINGS_FILENAME = "settings.json"
TRAY_TOOLTIP = "Translation Utility"

# --- Logging ---
LOG_LEVEL = "INFO" # Or "DEBUG", "WARNING", "ERROR"
LOG_FORMAT = '[%(asctime)s] %(levelname)s [%(threadName)s] in %(module)s.%(funcName)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# --- Hotkey Defaults ---
DEFAULT_HOTKEY = 'command+option+t'
DEFAULT_SCREENSHOT_HOTKEY = 'command+shift+a'
DEFAULT_EXPLAIN_HOTKEY = 'command+shift+e'

# Hotkey action names emitted by HotkeyManager.triggered
ACTION_TOGGLE_POPUP = "toggle_popup"
ACTION_SCREENSHOT_TRANSLATE = "screenshot_translate"
ACTION_SCREENSHOT_EXPLAIN = "screenshot_explain"

# --- Appearance ---
THEMES = {
    "system": "Follow System",
    "light": "Light",
    "dark": "Dark",
}
DEFAULT_THEME = "system"

# --- Translation ---
AVAILABLE_ENGINES = {
    "bing": "Bing Translator (Free)",
    "openai": "AI Model (OpenAI compatible)",
}
DEFAULT_TRANSLATION_ENGINE = "bing"
DEFAULT_TARGET_LANGUAGE = "auto"
TARGET_LANGUAGES = [
    ("Auto (Chinese <-> English)", "auto"), ("Chinese (Simplified)", "zh"),
    ("English", "en"), ("Japanese", "ja"), ("Korean", "ko"),
    ("French", "fr"), ("German", "de"), ("Spanish", "es"), ("Russian", "ru"),
]
# Language-model prompt names; unknown codes are passed through as-is
LANGUAGE_NAMES = {
    "en": "English",
    "zh-Hans": "Simplified Chinese",
    "ja": "Japanese",
    "ko": "Korean",
}
HOSTED_CHINESE_CODE = "zh-Hans"
DEFAULT_OPENAI_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_OPENAI_MODEL = "deepseek-chat"
FALLBACK_OPENAI_MODEL = "gpt-3.5-turbo"

# Bing web translator endpoints
BING_TRANSLATOR_URL = "https://www.bing.com/translator"
BING_TRANSLATE_API_URL = "https://www.bing.com/ttranslatev3"
BING_USER_AGENT = ("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
                   "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36")
BING_MAX_TEXT_LENGTH = 1000

# Result strings returned to the UI instead of raising
SENTINEL_BING_EMPTY = "Bing Error"
SENTINEL_BING_FAIL = "Bing Fail"
SENTINEL_MISSING_KEY = "Missing API Key"
SENTINEL_AI_EMPTY = "AI Error"
SENTINEL_API_ERROR = "API Error: {message}"
SENTINEL_UNKNOWN_SOURCE = "Unknown Source"

# --- OCR ---
AVAILABLE_OCR_SOURCES = {
    "system": "macOS Vision (Offline)",
    "glm": "GLM-4V Vision Model",
}
DEFAULT_OCR_SOURCE = "system"
OCR_NO_TEXT_SENTINEL = "No text recognized"
OCR_HELPER_TIMEOUT_SECONDS = 10
OCR_RECOGNITION_LANGUAGES = ["zh-Hans", "en"]
GLM_OCR_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"
GLM_OCR_MODEL = "glm-4v-flash"
OCR_PROMPT = ("Recognize all of the text in this image and return it line by line. "
              "Output only the text, with no explanation.")

# --- Screenshot Explain ---
AVAILABLE_VISION_PROVIDERS = {
    "glm": "GLM (Zhipu)",
    "openai": "OpenAI compatible",
}
DEFAULT_VISION_PROVIDER = "glm"
DEFAULT_VISION_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"
DEFAULT_VISION_MODEL = "glm-4v-flash"
# Suggested when switching the provider to OpenAI compatible
OPENAI_VISION_BASE_URL = "https://api.openai.com/v1"
OPENAI_VISION_MODEL = "gpt-4-vision-preview"
EXPLAIN_LANGUAGES = {"zh": "中文", "en": "English"}
DEFAULT_EXPLAIN_LANGUAGE = "zh"
VISION_TEMPERATURE = 0.7
VISION_MAX_TOKENS = 2000
MAX_HISTORY_ITEMS = 5

EXPLAIN_SYSTEM_PROMPTS = {
    "zh": "你是一个图片分析助手。请用自然流畅的语言回答，不要使用小标题、序号或分点列举。\n\n",
    "en": ("You are an image analysis assistant. Please respond naturally without headings, "
           "bullet points, or numbered lists.\n\n"),
}
EXPLAIN_SUMMARY_PROMPTS = {
    "zh": ("请简洁地总结这张图片的主要内容，不要使用小标题、序号或分点列举。\n\n"
           "要求：\n- 用1-3句话概括图片核心内容\n- 语言自然流畅，像在和朋友描述\n"
           "- 突出最重要的信息\n- 不要使用\"图片显示...\"这样的开头\n\n请用中文回复。"),
    "en": ("Please provide a concise summary of this image's main content without using headings, "
           "bullet points, or numbered lists.\n\nRequirements:\n- Summarize in 1-3 natural sentences\n"
           "- Write conversationally as if describing to a friend\n- Highlight the most important information\n"
           "- Don't start with \"The image shows...\"\n\nPlease respond in English."),
}
EXPLAIN_QUESTION_PROMPTS = {
    "zh": ("用户正在询问关于这张图片的问题。\n\n要求：\n- 直接回答问题，不要使用小标题或分点列举\n"
           "- 语言自然、简洁\n- 基于图片内容回答\n- 如果问题与图片无关，礼貌地引导回到图片内容\n\n请用中文回复。"),
    "en": ("The user is asking a question about this image.\n\nRequirements:\n"
           "- Answer directly without headings or bullet points\n- Be natural and concise\n"
           "- Base your answer on the image content\n- If the question is unrelated to the image, politely guide back\n\n"
           "Please respond in English."),
}
EXPLAIN_QUESTION_LABELS = {"zh": "用户问题：", "en": "User question: "}
EXPLAIN_ERROR_PREFIX = {"zh": "错误: ", "en": "Error: "}

# --- Timing (milliseconds) ---
LIVE_TRANSLATE_DEBOUNCE_MS = 600
SCREENSHOT_HIDE_DELAY_MS = 300
PASTE_DELAY_MS = 150
HTTP_TIMEOUT_SECONDS = 60

# --- Capture ---
SCREENCAPTURE_CMD = "screencapture"
SCREENSHOT_TRANSLATE_PREFIX = "screenshot"
SCREENSHOT_EXPLAIN_PREFIX = "explain-screenshot"

# --- Paste into the previously focused app ---
OSASCRIPT_CMD = "osascript"
PASTE_SCRIPT = 'tell application "System Events" to keystroke "v" using command down'

# --- Window Geometry ---
POPUP_WIDTH = 360
POPUP_HEIGHT = 120
RESULT_WINDOW_SIZE = (500, 400)
EXPLAIN_WINDOW_SIZE = (700, 800)

# --- UI Tooltips ---
TOOLTIP_HOTKEY_INPUT = "Click to set the global hotkey."
TOOLTIP_ENGINE_SELECT = "Select the translation service."
TOOLTIP_TARGET_LANGUAGE_SELECT = "Auto translates Chinese to English and everything else to Chinese."
TOOLTIP_OPENAI_KEY = "API key for the OpenAI compatible service.\nRequired only if the AI Model engine is selected."
TOOLTIP_OPENAI_BASE_URL = "Base URL of the chat completion API, e.g. https://api.deepseek.com/v1"
TOOLTIP_OCR_SOURCE_SELECT = "Select how text is recognized in screenshots."
TOOLTIP_GLM_KEY = "Zhipu GLM API key.\nRequired only if GLM-4V OCR is selected."
TOOLTIP_VISION_PROVIDER_SELECT = "Select the vision model provider used to explain screenshots."
TOOLTIP_CUSTOM_PROMPT = "Leave blank to use the built-in prompt."
