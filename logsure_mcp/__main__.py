from logsure_mcp.server import main

main()
