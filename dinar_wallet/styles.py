"""CSS styles for the Dinar Wallet application."""

CSS = """
Screen {
    background: #1e1e2e;
}

Header {
    background: #181825;
    text-style: bold;
    padding: 0 1;
    height: 3;
}

#status-bar {
    background: #181825;
    color: #a6adc8;
    padding: 0 2;
    height: 1;
    text-align: right;
    dock: top;
}

Footer {
    background: #181825;
    height: 2;
}

Tabs {
    background: #181825;
    height: 3;
}

Tab {
    background: #1e1e2e;
    text-style: bold;
    padding: 0 1;
    min-height: 1;
}

Tab.-active {
    background: #10b981;
    color: #0f172a;
    text-style: bold reverse;
}

DataTable {
    background: #1e1e2e;
    border: solid #3b82f6;
    min-height: 4;
    max-height: 14;
}

Button {
    background: transparent;
    color: #3b82f6;
    border: none;
    height: 3;
    min-height: 3;
    min-width: 20;
    padding: 0 1;
    margin: 0;
    content-align: center middle;
}

Button:hover {
    background: #3b82f6;
    color: #ffffff;
    text-style: underline;
}

Button:focus {
    background: #3b82f6;
    color: #ffffff;
    text-style: bold underline reverse;
}

Button.-primary {
    background: #10b981;
    color: #0f172a;
    border: solid #10b981;
    text-style: bold;
}

Button.-primary:hover {
    background: #34d399;
}

Button:disabled {
    color: #585b70;
    border: none;
    background: transparent;
    text-style: none;
}

Horizontal {
    height: auto;
    margin: 0 0 1 0;
}

Horizontal > * {
    height: auto;
}

Select {
    background: #181825;
    border: solid #3b82f6;
    min-height: 1;
    padding: 0 1;
}

Select > OptionList {
    background: #181825;
    border: solid #3b82f6;
}

Vertical, Horizontal {
    padding: 0 1;
}

#dashboard-tab, #transfer-tab, #cards-tab, #savings-tab, #profile-tab {
    padding: 1 2;
    overflow-y: auto;
}

#dashboard-title, #transfer-title, #cards-title, #savings-title, #profile-title,
#confirm-title, #processing-title, #result-title, #error-title, #freeze-title,
#limit-title, #amount-title, #goal-title, #investment-title, #profile-edit-title {
    text-style: bold;
    color: #6ee7b7;
    margin-bottom: 1;
    border-bottom: solid #10b981;
    padding-bottom: 0;
}

#balance-summary, #investment-summary, #profile-details, #referral-stats {
    padding: 0 1;
    background: #181825;
    border: solid #3b82f6;
    margin: 0 0 1 0;
}

#transfer-helper {
    color: #94a3b8;
    margin-bottom: 1;
}

#transfer-balance {
    color: #e2e8f0;
    margin-bottom: 1;
}

#transfer-balance-after {
    min-height: 1;
}

#recipient-results {
    max-height: 8;
}

#transfer-actions-row > Button, #card-actions-row > Button,
#savings-actions-row > Button, #goal-actions-row > Button,
#profile-actions-row > Button {
    width: 22;
    min-width: 22;
}

#section-label {
    color: #6ee7b7;
    text-style: bold;
    margin-top: 1;
}

#processing-spinner {
    color: #fbbf24;
    text-style: bold;
    margin: 1 0;
}

#reference-display {
    background: #181825;
    border: solid #3b82f6;
    padding: 0 1;
    margin: 0 0 1 0;
    color: #e2e8f0;
}

#error-message, #amount-error, #limit-error {
    color: #f43f5e;
}

Label {
    color: #e2e8f0;
}

Input {
    background: #181825;
    border: solid #3b82f6;
    color: #e2e8f0;
    padding: 0 1;
    min-height: 1;
}

Static {
    color: #a6adc8;
}

.section-label {
    color: #6ee7b7;
    text-style: bold;
    margin-top: 1;
}

ModalScreen {
    align: center middle;
}

ModalScreen > Vertical {
    border: solid #10b981;
    border-title-style: bold;
    background: #181825;
    padding: 1 2;
    width: 70;
    height: auto;
}
"""
