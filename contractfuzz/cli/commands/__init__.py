"""
Pacote de comandos do CLI contractfuzz.

- resolve_cmd.py → contractfuzz resolve
- cases_cmd.py → contractfuzz cases
- classify_cmd.py → contractfuzz classify
"""
