"""Usage text served as MCP prompts alongside the process tools."""

LIST_PROCESSES_QUESTION = "How do I list running processes?"

LIST_PROCESSES_ANSWER = """The list_processes tool shows all running processes:

1. List all processes:
   list_processes({})

2. Filter by name (case-insensitive substring):
   list_processes({"filter": "python"})

3. Limit results:
   list_processes({"filter": "node", "limit": 10})

Returns for each process:
- pid: Process ID
- name: Process/command name
- cpu_percent: CPU usage percentage (100 per fully used core)
- memory_mb: Resident memory in megabytes

Processes are sorted by CPU usage (highest first).
- count: number of processes returned
- total_count: number of matches before the limit was applied
- limited: true when the limit was reached and more matches may exist

Use this for:
- System monitoring
- Finding PIDs for processes to terminate
- Debugging performance issues
- Checking if a specific process is running

PIDs can be reused by the OS once a process exits, so list again right
before acting on one."""

KILL_PROCESS_QUESTION = "How do I kill a process?"

KILL_PROCESS_ANSWER = """The kill_process tool terminates a process by PID:

Usage: kill_process({"pid": 12345})

IMPORTANT - This is DESTRUCTIVE:
- Sends SIGKILL (force kill, immediate termination)
- Process cannot clean up or save state
- No graceful shutdown
- Use with caution!

Before killing:
1. Use list_processes to find the PID
2. Verify it's the correct process
3. Consider if force kill is necessary

Error kinds:
- invalid_argument: PID 0 or out of range, nothing was signalled
- not_found: No process with that PID (or it already exited)
- permission_denied: Insufficient privileges (system processes, other users)
- signal_failed: The OS could not deliver the signal
- internal: The server failed while handling the request

Returns:
- success: true if terminated
- pid: The terminated process ID
- process_name: Name of the terminated process

Killing the same PID twice fails the second time with not_found.
Always confirm the PID before killing!"""
