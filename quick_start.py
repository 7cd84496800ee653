from lua_board import BoardSession, CollectingNotifier

notifier = CollectingNotifier()

# Context manager 사용 (권장)
with BoardSession(notifier=notifier) as session:
    board = session.attach('/dev/ttyUSB0')
    if board is None:
        raise SystemExit("Board not found")

    # 보드 정보
    print(f"Board info: {board.info}")

    # 파일 목록
    for entry in board.get_dir_content('/'):
        print(f"{entry.type} {entry.size:>8} {entry.date} {entry.name}")

    # 코드 업로드 후 실행
    board.run_code('/hello.lua', b'print("hello from Lua RTOS")\n')

print(f"Events: {notifier.names}")
