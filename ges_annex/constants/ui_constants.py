"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "GES Annex"
PLACEHOLDER_QUESTION: str = "Enter your question text (supports Markdown + LaTeX)."
PLACEHOLDER_TITLE: str = "Quiz title"

MODE_BUTTON_QUIZZES: str = "Quizzes"
MODE_BUTTON_CREATE: str = "Create Quiz"
MODE_BUTTON_RESULTS: str = "Quiz Results"
MODE_BUTTON_NEWS: str = "News"
MODE_BUTTON_MATERIALS: str = "Materials"
MODE_BUTTON_SIGN_IN: str = "Sign In"
MODE_BUTTON_SIGN_OUT: str = "Sign Out"

LIST_START_BUTTON: str = "Start Quiz"
LIST_EMPTY_STATE: str = "No quizzes available yet."
TAKE_NEXT_BUTTON: str = "Next Question"
TAKE_SUBMIT_BUTTON: str = "Submit Quiz"
TAKE_BACK_BUTTON: str = "Back to Quizzes"
SELECT_ANSWER_MESSAGE: str = "Please select an answer before moving on."
TIME_UP_MESSAGE: str = "Time is up. Your answers have been submitted."

AUTHOR_ADD_BUTTON: str = "Add Question"
AUTHOR_REMOVE_BUTTON: str = "Remove Question"
AUTHOR_SAVE_BUTTON: str = "Save Quiz"
AUTHOR_IMPORT_BUTTON: str = "Import Quiz"
AUTHOR_EXPORT_BUTTON: str = "Export Quiz"
AUTHOR_PREV_BUTTON: str = "Previous Question"
AUTHOR_NEXT_BUTTON: str = "Next Question"

RESULTS_EMPTY_STATE: str = "No results for this quiz yet."

IMPORT_DIALOG_TITLE: str = "Select quiz file"
IMPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Save quiz to file"
EXPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"

SIGN_IN_REQUIRED_MESSAGE: str = "Please sign in to take a quiz."
AUTHOR_REQUIRED_MESSAGE: str = "Your account is not allowed to author quizzes."
QUIZ_SAVED_MESSAGE: str = "Quiz saved and published."
REFRESH_INTERVAL_MS: int = 1000
