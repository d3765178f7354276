"""
Main Entry Point for Shift Form Workflow

Wires the data manager, notification services and sound player into the
main window, with application-wide logging and error handling.
"""

import sys
import logging
import traceback
from pathlib import Path
from datetime import datetime
from tkinter import messagebox

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shift_workflow.data_manager import DataManager
from shift_workflow.notifications import NotificationCenter, NotificationPreferences, ReminderScheduler, EventBus
from shift_workflow.sound import SoundEffects


def setup_logging():
    """Setup application logging"""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"shift_workflow_{datetime.now().strftime('%Y%m%d')}.log"

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

    return logging.getLogger(__name__)


def check_dependencies():
    """Check if all required dependencies are available"""
    required_modules = [
        'customtkinter',
        'pandas',
        'openpyxl',
        'reportlab',
    ]

    missing_modules = []

    for module in required_modules:
        try:
            __import__(module)
        except ImportError:
            missing_modules.append(module)

    if missing_modules:
        error_msg = f"Missing required dependencies: {', '.join(missing_modules)}\n"
        error_msg += "Please install them using: pip install -e ."
        raise ImportError(error_msg)


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = logging.getLogger(__name__)
    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback)
    )

    # Show error dialog if GUI is available
    try:
        error_msg = f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}"
        messagebox.showerror("Application Error", error_msg)
    except Exception as e:
        logger.debug(f"Could not show error dialog: {e}")


class ShiftWorkflowApp:
    """Main application class"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.data_manager = None
        self.notifications = None
        self.reminders = None
        self.sounds = None
        self.events = None
        self.main_window = None

    def initialize(self):
        """Initialize application components"""
        try:
            self.logger.info("Initializing Shift Workflow Application")

            check_dependencies()
            self.logger.info("All dependencies available")

            self.data_manager = DataManager()
            self.logger.info("Data manager initialized")

            preferences = NotificationPreferences()
            self.notifications = NotificationCenter(preferences)
            self.reminders = ReminderScheduler(self.notifications)
            self.sounds = SoundEffects(enabled=preferences.sound_enabled)
            self.events = EventBus()
            self.logger.info("Notification services initialized")

            return True

        except Exception as e:
            self.logger.error(f"Failed to initialize application: {e}")
            self.logger.error(traceback.format_exc())
            return False

    def run(self):
        """Run the main application"""
        try:
            if not self.initialize():
                self.show_initialization_error()
                return False

            self.logger.info("Starting GUI application")

            # Imported late so a missing customtkinter is reported by initialize()
            from shift_workflow.ui import MainWindow

            self.main_window = MainWindow(
                data_manager=self.data_manager,
                notifications=self.notifications,
                sounds=self.sounds,
                reminders=self.reminders,
                events=self.events
            )
            self.main_window.mainloop()

            self.logger.info("Application closed normally")
            return True

        except Exception as e:
            self.logger.error(f"Application error: {e}")
            self.logger.error(traceback.format_exc())
            self.show_runtime_error(e)
            return False

    def show_initialization_error(self):
        """Show initialization error dialog"""
        try:
            import tkinter as tk
            root = tk.Tk()
            root.withdraw()

            error_msg = """
Failed to initialize Shift Workflow Application.

Please check:
1. All required dependencies are installed
2. The logs directory for detailed error information

Required: customtkinter, pandas, openpyxl, reportlab
Install with: pip install -e .
            """
            messagebox.showerror("Initialization Error", error_msg.strip())
            root.destroy()

        except Exception as e:
            print(f"Failed to show initialization error: {e}")

    def show_runtime_error(self, error):
        """Show runtime error dialog"""
        try:
            error_msg = f"""
An error occurred while running the application:

{type(error).__name__}: {str(error)}

The application will now close. Please check the log files
for more detailed information.
            """
            messagebox.showerror("Runtime Error", error_msg.strip())

        except Exception as e:
            print(f"Failed to show runtime error: {e}")


def main():
    """Main entry point"""
    sys.excepthook = handle_exception

    logger = setup_logging()
    logger.info("=" * 50)
    logger.info("Starting Shift Workflow Application")
    logger.info("=" * 50)

    app = ShiftWorkflowApp()
    success = app.run()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
