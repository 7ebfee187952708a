"""UI components for the Brand Kit Editor

This package contains the interactive parts of the overlay engine:
- transform_widgets: handle classes, modes and drag state
- pointer_controller: pointer/keyboard state machine (no Qt dependency beyond handle drawing)
- brand_kit_widget: Qt widget hosting the controller on the reference canvas

Widgets are imported from their modules directly so that the controller can
be used without creating a QApplication.
"""
