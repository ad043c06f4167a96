from voice_call_mcp.server import main

main()
