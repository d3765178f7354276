"""
User Interface for Shift Form Workflow

CustomTkinter-based GUI: a main window listing the shifts of the selected
date, the two-step add/edit shift dialog and a small employee dialog.
All behavior is delegated to ShiftFormController.
"""

import customtkinter as ctk
from tkinter import messagebox, filedialog
from typing import Callable, Optional
import logging

from .data_manager import DataManager, DataValidationError, ROLE_OPTIONS, STATUS_OPTIONS, DEFAULT_ROLE
from .form_logic import FormStep, STEP_LABELS, ValidationKind, allowed_roles
from .notifications import NotificationCenter, ReminderScheduler, EventBus, TUTORIAL_PROMPT_EVENT
from .reporting import ExportManager
from .shift_form import ShiftFormController, UiState
from .sound import SoundEffects

logger = logging.getLogger(__name__)


# Configure CustomTkinter
ctk.set_appearance_mode("light")
ctk.set_default_color_theme("blue")


class EmployeeDialog(ctk.CTkToplevel):
    """Dialog for registering an employee on the roster"""

    def __init__(self, parent, data_manager: DataManager, name: str = "", callback: Callable = None):
        super().__init__(parent)
        self.data_manager = data_manager
        self.callback = callback

        self.title("Add Employee")
        self.geometry("400x260")
        self.transient(parent)
        self.grab_set()

        main_frame = ctk.CTkFrame(self)
        main_frame.pack(fill="both", expand=True, padx=20, pady=20)

        ctk.CTkLabel(main_frame, text="Name:").pack(anchor="w", pady=(0, 5))
        self.name_entry = ctk.CTkEntry(main_frame, width=300)
        self.name_entry.insert(0, name)
        self.name_entry.pack(pady=(0, 15))

        ctk.CTkLabel(main_frame, text="Role:").pack(anchor="w", pady=(0, 5))
        self.role_var = ctk.StringVar(value=DEFAULT_ROLE)
        ctk.CTkOptionMenu(main_frame, values=list(ROLE_OPTIONS), variable=self.role_var, width=300).pack(pady=(0, 20))

        button_frame = ctk.CTkFrame(main_frame)
        button_frame.pack(fill="x")
        ctk.CTkButton(button_frame, text="Cancel", command=self.destroy, width=100).pack(side="right", padx=(10, 0))
        ctk.CTkButton(button_frame, text="Save", command=self._save, width=100).pack(side="right")

    def _save(self):
        name = self.name_entry.get().strip()
        if not name:
            messagebox.showerror("Error", "Name is required", parent=self)
            return
        try:
            employee = self.data_manager.add_employee(name, self.role_var.get())
        except DataValidationError as e:
            messagebox.showerror("Error", str(e), parent=self)
            return

        if self.callback:
            self.callback(employee)
        self.destroy()


class ShiftFormDialog(ctk.CTkToplevel):
    """Two-step add/edit shift dialog"""

    def __init__(self, parent, data_manager: DataManager, is_edit: bool,
                 notifications: NotificationCenter, sounds: SoundEffects,
                 reminders: ReminderScheduler, events: EventBus, ui_state: UiState,
                 selected_shift_id: Optional[str] = None, on_closed: Callable = None):
        super().__init__(parent)
        self.data_manager = data_manager
        self.on_closed = on_closed

        self.title("Edit Shift" if is_edit else "Add New Shift")
        self.geometry("440x460")
        self.transient(parent)
        self.grab_set()

        # Deferred work is tied to this window's lifetime
        self.controller = ShiftFormController(
            data_manager, self,
            notifications=notifications, sounds=sounds, reminders=reminders,
            events=events, ui_state=ui_state
        )
        self.controller.add_listener(self._refresh)

        self._create_widgets()
        self.controller.open(is_edit, selected_shift_id)
        self._populate_fields()

        self.protocol("WM_DELETE_WINDOW", self._close)
        self.bind("<Return>", self._on_return)
        self.bind("<KP_Enter>", self._on_return)

    def _create_widgets(self):
        self.progress_label = ctk.CTkLabel(self, text="", font=ctk.CTkFont(size=12, weight="bold"))
        self.progress_label.pack(pady=(15, 5))

        self.body = ctk.CTkFrame(self)
        self.body.pack(fill="both", expand=True, padx=20, pady=10)

        # Step 1
        self.step1 = ctk.CTkFrame(self.body)
        ctk.CTkLabel(self.step1, text="Employee Name").pack(anchor="w", padx=10, pady=(10, 0))
        self.employee_var = ctk.StringVar()
        self.employee_box = ctk.CTkComboBox(
            self.step1, width=300, variable=self.employee_var,
            values=[e.name for e in self.data_manager.get_employees()],
            command=lambda value: self.controller.change_field("employee_name", value)
        )
        self.employee_box.pack(padx=10)
        self.employee_box.bind("<KeyRelease>", self._on_employee_typed)

        ctk.CTkLabel(self.step1, text="Role").pack(anchor="w", padx=10, pady=(10, 0))
        self.role_var = ctk.StringVar()
        self.role_menu = ctk.CTkOptionMenu(
            self.step1, values=list(ROLE_OPTIONS), variable=self.role_var, width=300,
            command=lambda value: self.controller.change_field("role", value)
        )
        self.role_menu.pack(padx=10)

        ctk.CTkLabel(self.step1, text="Status").pack(anchor="w", padx=10, pady=(10, 0))
        self.status_var = ctk.StringVar()
        ctk.CTkOptionMenu(
            self.step1, values=STATUS_OPTIONS, variable=self.status_var, width=300,
            command=lambda value: self.controller.change_field("status", value)
        ).pack(padx=10)

        self.priority_var = ctk.BooleanVar(value=False)
        ctk.CTkSwitch(
            self.step1, text="Priority Shift", variable=self.priority_var,
            command=lambda: self.controller.set_priority(self.priority_var.get())
        ).pack(anchor="w", padx=10, pady=15)

        # Step 2
        self.step2 = ctk.CTkFrame(self.body)
        ctk.CTkLabel(self.step2, text="Start Time").pack(anchor="w", padx=10, pady=(10, 0))
        self.start_entry = ctk.CTkEntry(self.step2, width=300)
        self.start_entry.pack(padx=10)
        self.start_entry.bind("<FocusOut>", lambda e: self._on_time_edited("start_time", self.start_entry))

        ctk.CTkLabel(self.step2, text="End Time").pack(anchor="w", padx=10, pady=(10, 0))
        self.end_entry = ctk.CTkEntry(self.step2, width=300)
        self.end_entry.pack(padx=10)
        self.end_entry.bind("<FocusOut>", lambda e: self._on_time_edited("end_time", self.end_entry))

        self.time_range_label = ctk.CTkLabel(self.step2, text="")
        self.time_range_label.pack(anchor="w", padx=10, pady=10)

        # Validation feedback
        self.error_frame = ctk.CTkFrame(self)
        self.error_label = ctk.CTkLabel(self.error_frame, text="", wraplength=380)
        self.error_label.pack(padx=10, pady=5)
        self.error_action = ctk.CTkButton(self.error_frame, text="", width=160)
        self.error_action.pack(side="left", padx=10, pady=5)
        ctk.CTkButton(self.error_frame, text="Dismiss", width=100,
                      command=self.controller.dismiss_validation).pack(side="right", padx=10, pady=5)

        # Success presentation
        self.success_frame = ctk.CTkFrame(self)
        ctk.CTkLabel(self.success_frame, text="✅ Shift saved",
                     font=ctk.CTkFont(size=16, weight="bold")).pack(pady=10)
        ctk.CTkButton(self.success_frame, text="Done",
                      command=self.controller.acknowledge_success).pack(pady=(0, 10))

        # Buttons
        self.button_frame = ctk.CTkFrame(self)
        self.button_frame.pack(fill="x", padx=20, pady=15)
        ctk.CTkButton(self.button_frame, text="Cancel", command=self._close, width=90).pack(side="left")
        self.submit_button = ctk.CTkButton(self.button_frame, text="Next", command=self._submit,
                                           width=100, fg_color="green")
        self.submit_button.pack(side="right")
        self.back_button = ctk.CTkButton(self.button_frame, text="Back",
                                         command=self.controller.previous_step, width=90)
        self.back_button.pack(side="right", padx=(0, 10))

    def _populate_fields(self):
        draft = self.controller.session.draft
        self.employee_var.set(draft.employee_name)
        self.role_var.set(draft.role)
        self.status_var.set(draft.status)
        self.start_entry.insert(0, draft.start_time)
        self.end_entry.insert(0, draft.end_time)
        self._refresh()

    def _on_employee_typed(self, event=None):
        self.controller.change_field("employee_name", self.employee_var.get())

    def _on_time_edited(self, field_name: str, entry: ctk.CTkEntry):
        session = self.controller.session
        if session is not None and entry.get() != getattr(session.draft, field_name):
            self.controller.change_field(field_name, entry.get())

    def _on_return(self, event=None):
        session = self.controller.session
        if session is None or session.show_success:
            return None
        if self.controller.handle_key(event.keysym if event else "Return"):
            return "break"
        self._submit()
        return "break"

    def _submit(self):
        # Flush time entries that still have focus
        self._on_time_edited("start_time", self.start_entry)
        self._on_time_edited("end_time", self.end_entry)
        self.controller.submit()

    def _refresh(self):
        session = self.controller.session
        if session is None:
            self._teardown()
            return

        step = session.steps.current
        self.progress_label.configure(text=f"Step {int(step)} of {len(FormStep)}: {STEP_LABELS[step]}")
        self.step1.pack_forget()
        self.step2.pack_forget()
        (self.step2 if session.steps.is_terminal else self.step1).pack(fill="both", expand=True)

        draft = session.draft
        if self.role_var.get() != draft.role:
            self.role_var.set(draft.role)
        self.role_menu.configure(values=allowed_roles(draft.employee_name, self.data_manager))
        self.time_range_label.configure(text=f"Shift time: {draft.time_range}")

        self.back_button.configure(state="normal" if session.steps.is_terminal else "disabled")
        self.submit_button.configure(
            text="Saving..." if session.is_submitting else ("Save Shift" if session.steps.is_terminal else "Next"),
            state="disabled" if session.is_submitting else "normal"
        )

        self.error_frame.pack_forget()
        if session.validation is not None:
            self.error_label.configure(
                text=session.validation.message,
                text_color="red" if session.validation.severity == "error" else "#B7791F"
            )
            if session.validation.kind is ValidationKind.EMPLOYEE_NOT_FOUND:
                self.error_action.configure(text="Register employee", command=self._register_employee)
            else:
                self.error_action.configure(text="Go back and edit", command=self._go_back)
            self.error_frame.pack(fill="x", padx=20, before=self.button_frame)

        if session.show_success:
            self.body.pack_forget()
            self.button_frame.pack_forget()
            self.success_frame.pack(fill="both", expand=True, padx=20, pady=20)

    def _go_back(self):
        self.controller.dismiss_validation()
        self.controller.previous_step()

    def _register_employee(self):
        name = self.controller.session.draft.employee_name
        self.controller.dismiss_validation()

        def on_added(employee):
            if self.controller.select_registered_employee(employee.name) is not None:
                self.employee_box.configure(values=[e.name for e in self.data_manager.get_employees()])

        EmployeeDialog(self, self.data_manager, name=name, callback=on_added)

    def _close(self):
        self.controller.close()

    def _teardown(self):
        if self.on_closed:
            self.on_closed()
        self.destroy()

    def destroy(self):
        # Closing the window by any path cancels pending form tasks
        if self.controller.session is not None:
            self.controller.close()
            return
        super().destroy()


class MainWindow(ctk.CTk):
    """Main application window"""

    def __init__(self, data_manager: DataManager, notifications: NotificationCenter,
                 sounds: SoundEffects, reminders: ReminderScheduler, events: EventBus):
        super().__init__()

        self.title("Shift Scheduling")
        self.geometry("900x600")

        self.data_manager = data_manager
        self.notifications = notifications
        self.sounds = sounds
        self.reminders = reminders
        self.events = events
        self.ui_state = UiState()
        self.export_manager = ExportManager(data_manager)

        if self.sounds.backend is None:
            self.sounds.backend = self._play_cue

        self._create_widgets()
        self.notifications.subscribe(lambda n: self.after(0, self._update_status, n.message))
        self.events.subscribe(TUTORIAL_PROMPT_EVENT, self._show_tutorial_prompt)
        self._refresh_shifts()

    def _create_widgets(self):
        control_frame = ctk.CTkFrame(self, height=60)
        control_frame.pack(fill="x", padx=10, pady=10)

        ctk.CTkLabel(control_frame, text="Date:").pack(side="left", padx=(10, 5))
        self.date_entry = ctk.CTkEntry(control_frame, width=120)
        self.date_entry.insert(0, self.data_manager.get_selected_date())
        self.date_entry.pack(side="left")
        self.date_entry.bind("<Return>", lambda e: self._on_date_change())

        ctk.CTkButton(control_frame, text="Add Shift", command=self._add_shift).pack(side="left", padx=10)
        ctk.CTkButton(control_frame, text="Edit Shift", command=self._edit_shift).pack(side="left")
        ctk.CTkButton(control_frame, text="Add Employee", command=self._add_employee).pack(side="left", padx=10)
        ctk.CTkButton(control_frame, text="Export", command=self._export_shifts).pack(side="left")

        self.shift_var = ctk.StringVar(value="")
        self.shift_menu = ctk.CTkOptionMenu(control_frame, values=[""], variable=self.shift_var, width=260)
        self.shift_menu.pack(side="right", padx=10)

        self.shift_list = ctk.CTkTextbox(self, font=ctk.CTkFont(family="Courier", size=12))
        self.shift_list.pack(fill="both", expand=True, padx=10)

        self.status_var = ctk.StringVar(value="Ready")
        ctk.CTkLabel(self, textvariable=self.status_var, anchor="w").pack(fill="x", padx=10, pady=5)

    def _on_date_change(self):
        self.data_manager.set_selected_date(self.date_entry.get().strip())
        self._refresh_shifts()

    def _refresh_shifts(self):
        shifts = self.data_manager.get_shifts(self.data_manager.get_selected_date())
        self._shift_ids = {f"{s.employee_name} ({s.time_range})": s.id for s in shifts}

        self.shift_list.configure(state="normal")
        self.shift_list.delete("1.0", "end")
        for s in shifts:
            self.shift_list.insert("end", f"{s.time_range:<22} {s.employee_name:<20} {s.role:<12} {s.status}\n")
        if not shifts:
            self.shift_list.insert("end", "No shifts scheduled for this date.\n")
        self.shift_list.configure(state="disabled")

        labels = list(self._shift_ids) or [""]
        self.shift_menu.configure(values=labels)
        self.shift_var.set(labels[0])

    def _open_form(self, is_edit: bool, shift_id: Optional[str] = None):
        ShiftFormDialog(
            self, self.data_manager, is_edit,
            self.notifications, self.sounds, self.reminders, self.events, self.ui_state,
            selected_shift_id=shift_id, on_closed=self._refresh_shifts
        )

    def _add_shift(self):
        self._open_form(False)

    def _edit_shift(self):
        shift_id = self._shift_ids.get(self.shift_var.get())
        if not shift_id:
            messagebox.showinfo("Edit Shift", "Select a shift to edit first.")
            return
        self.ui_state.selected_shift_id = shift_id
        self._open_form(True, shift_id)

    def _add_employee(self):
        EmployeeDialog(self, self.data_manager,
                       callback=lambda emp: self._update_status(f"Employee '{emp.name}' added"))

    def _play_cue(self, cue: str, volume: float):
        # Tk only offers the system bell; quiet cues are skipped
        if cue in ("error", "notification", "complete") and volume > 0.3:
            self.bell()

    def _update_status(self, message: str):
        self.status_var.set(message)

    def _show_tutorial_prompt(self):
        messagebox.showinfo("Getting Started", "You've added your first shift! Explore templates, "
                                               "views and reminders from the main window.")

    def _export_shifts(self):
        try:
            date_str = self.data_manager.get_selected_date()
            output_path = filedialog.asksaveasfilename(
                initialfile=self.export_manager.get_default_filename("pdf", date_str),
                defaultextension=".pdf",
                filetypes=[
                    ("PDF files", "*.pdf"),
                    ("Excel files", "*.xlsx"),
                    ("CSV files", "*.csv"),
                ],
                title="Export Shifts"
            )
            if not output_path:
                return  # User cancelled

            file_extension = output_path.split('.')[-1].lower()
            format_type = {"xlsx": "excel", "csv": "csv"}.get(file_extension, "pdf")

            if self.export_manager.export_shifts(format_type, output_path, date_str):
                messagebox.showinfo("Export Successful", f"Shifts exported successfully to:\n{output_path}")
            else:
                messagebox.showerror("Export Failed", "Failed to export shifts. Please check the file path and try again.")

        except Exception as e:
            logger.error(f"Export failed: {e}", exc_info=True)
            messagebox.showerror("Export Error", f"An error occurred during export:\n{str(e)}")


def main():
    """Main entry point for the UI"""
    data_manager = DataManager()
    notifications = NotificationCenter()
    app = MainWindow(
        data_manager=data_manager,
        notifications=notifications,
        sounds=SoundEffects(),
        reminders=ReminderScheduler(notifications),
        events=EventBus()
    )
    app.mainloop()


if __name__ == "__main__":
    main()
