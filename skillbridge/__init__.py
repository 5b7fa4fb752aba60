# skillbridge - mentorship accountability service
