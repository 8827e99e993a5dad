"""Static metadata describing GES Annex."""

APP_NAME = "GES Annex"
APP_VERSION = "0.2"
APP_LICENSE = "MIT License"
APP_CONTACT_EMAIL = "support@gesannex.edu.gh"
APP_ABOUT_TEXT = (
    "GES Annex is a learning companion providing educational materials, news, "
    "and interactive quizzes for Basic, JHS, and SHS levels."
)

HELP_TEXT = (
    "Sign in to take a quiz. The timer covers the whole quiz, and when it runs out "
    "your answers so far are submitted automatically.\n\n"
    "Authors can write quizzes in the app or import a .txt file in this format:\n\n"
    "TITLE: Fractions warm-up\n"
    "TIMER: 120\n\n"
    "Q: What is $\\frac{1}{2} + \\frac{1}{4}$?\n"
    "A: \\frac{3}{4}\nB: \\frac{2}{6}\nC: \\frac{1}{8}\nD: 1\n"
    "CORRECT: A"
)
